# settings.py

# Runner
FPS = 30
TITLE = "Idle Exile"

# Periodic drivers (milliseconds)
SPAWN_INTERVAL_MS = 2200
BASE_COMBAT_INTERVAL_MS = 1000
MIN_COMBAT_INTERVAL_MS = 300
QUICK_TALENT_SPEEDUP = 0.05

# Encounter / log caps
MAX_ENEMIES = 25
COMBAT_LOG_MAX = 200

# Inventory
INVENTORY_PAGES = 10
ITEMS_PER_PAGE = 4
INVENTORY_CAPACITY = INVENTORY_PAGES * ITEMS_PER_PAGE

# Skill bar
SKILL_BAR_SLOTS = 6
MAX_SUPPORTS_PER_SKILL = 6

# Talents
TALENT_MAX_RANK = 10

# Levelling
LEVEL_UP_HP_GAIN = 8
NEXT_LEVEL_XP_GROWTH = 1.25

# Knock-out
REVIVE_HP_FRACTION = 0.6
KNOCKOUT_GOLD_PER_LEVEL = 2
KNOCKOUT_GOLD_CAP = 10

# Combat variance
DAMAGE_VARIANCE = 0.10
BASE_CRIT_MULTIPLIER = 1.8
