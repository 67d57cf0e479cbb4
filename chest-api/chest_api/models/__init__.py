from .item import Item
from .chest import Chest
from .chest_entry import ChestEntry
from .activity_log import ActivityLog
