from .models import Base, SettingsRecordJSON, AutoTrashSettingsRecord
