import os
from dotenv import load_dotenv

# Load variables from .env file into environment variables
load_dotenv()

# Bot command prefix
COMMAND_PREFIX = os.getenv("AUTOMAIL_COMMAND_PREFIX", "!")

# Where schedules are persisted
SCHEDULES_FILE = os.getenv("AUTOMAIL_SCHEDULES_FILE", "automail_schedules.json")

# Mail groups and users: {"mailGroups": [...], "users": [...]}
DIRECTORY_FILE = os.getenv("AUTOMAIL_DIRECTORY_FILE", "automail_directory.json")

# Defaults for a new schedule
DEFAULT_HOUR = int(os.getenv("AUTOMAIL_DEFAULT_HOUR", "9"))  # 09:00
DEFAULT_MINUTE = int(os.getenv("AUTOMAIL_DEFAULT_MINUTE", "0"))
DEFAULT_DAY_OF_WEEK = 1  # Monday (0=Sunday)
DEFAULT_DAY_OF_MONTH = 1

# Rows per page in the schedule list
TABLE_PAGE_SIZE = int(os.getenv("AUTOMAIL_TABLE_PAGE_SIZE", "10"))

# Seconds to wait for a delete confirmation
CONFIRM_TIMEOUT = 30
