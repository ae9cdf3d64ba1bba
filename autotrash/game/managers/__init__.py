from .profile_manager import ProfileManager
from .trash_manager import TrashManager
