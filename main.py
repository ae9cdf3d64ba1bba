from autotrash.bot_core import run_bot

if __name__ == "__main__":
    run_bot()
