"""All tunable constants for the shelter simulation.

Every magic number in the codebase must reference this file.
"""

# =============================================================================
# RESOURCES
# =============================================================================
RESOURCE_TYPES: list[str] = ["food", "materials", "medical", "fuel", "cash"]

STARTING_RESOURCES: dict[str, int] = {
    "food": 20,
    "materials": 10,
    "medical": 5,
    "fuel": 10,
    "cash": 50,
}

STARTING_POCKET: dict[str, int] = {
    "food": 6,
    "materials": 0,
    "medical": 1,
    "fuel": 0,
    "cash": 15,
}

LANDLORD_OWNER: str = "landlord"
RESOURCE_VALIDATION_DEFAULT: bool = False  # clamp at zero instead of rejecting

# =============================================================================
# THRESHOLDS (warning / critical / emergency)
# =============================================================================
RESOURCE_THRESHOLDS: dict[str, dict[str, int]] = {
    "food": {"warning": 10, "critical": 5, "emergency": 2},
    "materials": {"warning": 8, "critical": 3, "emergency": 1},
    "medical": {"warning": 6, "critical": 2, "emergency": 0},
    "fuel": {"warning": 5, "critical": 2, "emergency": 0},
    "cash": {"warning": 20, "critical": 10, "emergency": 5},
}
ABUNDANT_MULTIPLIER: float = 2.0  # above warning * this -> abundant

# =============================================================================
# TRADE (fixed unit values)
# =============================================================================
RESOURCE_UNIT_VALUES: dict[str, float] = {
    "food": 1.5,
    "materials": 3.0,
    "medical": 4.0,
    "fuel": 3.0,
    "cash": 1.0,
}

# =============================================================================
# CONSUMPTION
# =============================================================================
LANDLORD_DAILY_FOOD: int = 2
TENANT_DAILY_FOOD: int = 2
BUILDING_DAILY_FUEL: int = 1
ELDER_DAILY_MEDICAL: int = 1
CONSUMPTION_WINDOW_DAYS: int = 7
CONSUMPTION_TREND_SMOOTHING: float = 0.5
TREND_BAND: float = 0.1  # |trend| below this is "stable"
SCARCITY_WARNING_MULTIPLIER: float = 3.0  # warning * this == full stock
DEPLETION_SENTINEL_DAYS: int = 9999
SCARCITY_TRACKED_TYPES: list[str] = ["food", "materials", "medical", "fuel"]

# =============================================================================
# ACTIVITIES
# =============================================================================
YARD_HARVEST_FOOD: int = 2
YARD_HARVEST_COOLDOWN_DAYS: int = 2
MAX_SCAVENGE_PER_DAY: int = 2
SCAVENGE_SUCCESS_RATES: dict[str, int] = {
    "soldier": 85,
    "worker": 75,
    "farmer": 65,
    "doctor": 50,
    "elder": 40,
}
SCAVENGE_DEFAULT_SUCCESS_RATE: int = 50
SCAVENGE_REWARDS: dict[str, tuple[int, int]] = {
    "food": (3, 8),
    "materials": (2, 6),
    "medical": (1, 4),
}
SCAVENGE_MAX_REWARD_TYPES: int = 2
SCAVENGE_INJURY_CHANCE: float = 0.10
SCAVENGE_INFECTION_CHANCE: float = 0.05
ROOM_REPAIR_COST: int = 3
ROOM_REPAIR_COST_WITH_WORKER: int = 2

# =============================================================================
# MUTUAL AID
# =============================================================================
MUTUAL_AID_PROBABILITY: float = 0.3
AID_FOOD_NEEDY_MAX: int = 1
AID_FOOD_HELPER_MIN: int = 3
AID_FOOD_AMOUNT: int = 2
AID_CASH_NEEDY_MAX: int = 5
AID_CASH_HELPER_MIN: int = 12
AID_CASH_AMOUNT: int = 5
AID_MEDICAL_NEEDY_MAX: int = 1
AID_MEDICAL_HELPER_MIN: int = 2
AID_MEDICAL_AMOUNT: int = 1
AID_AFFINITY_BONUS: int = 5  # helper and recipient grow closer

# =============================================================================
# TENANTS & ROOMS
# =============================================================================
TENANT_TYPES: list[str] = ["doctor", "worker", "farmer", "soldier", "elder"]
STARTING_ROOMS: int = 4
STARTING_TENANTS: int = 2

# Daily rent per occupation
TENANT_RENT: dict[str, int] = {
    "doctor": 15,
    "worker": 12,
    "farmer": 10,
    "soldier": 13,
    "elder": 8,
}
DEFAULT_RENT: int = 12
REINFORCED_RENT_BONUS_RATE: float = 0.2
# Resources accepted in lieu of cash, in the order they are taken
RENT_RESOURCE_ORDER: list[str] = ["food", "materials", "medical", "fuel"]

# =============================================================================
# APPLICANTS
# =============================================================================
APPLICANTS_PER_DAY: tuple[int, int] = (1, 3)  # inclusive
TENANT_INFECTION_RISK: dict[str, float] = {
    "doctor": 0.10,
    "worker": 0.20,
    "farmer": 0.15,
    "soldier": 0.15,
    "elder": 0.05,
}
DEFAULT_INFECTION_RISK: float = 0.2
APPLICANT_POCKETS: dict[str, dict[str, int]] = {
    "doctor": {"food": 3, "materials": 0, "medical": 5, "fuel": 0, "cash": 20},
    "worker": {"food": 4, "materials": 8, "medical": 0, "fuel": 0, "cash": 15},
    "farmer": {"food": 8, "materials": 2, "medical": 0, "fuel": 0, "cash": 12},
    "soldier": {"food": 5, "materials": 3, "medical": 1, "fuel": 0, "cash": 14},
    "elder": {"food": 4, "materials": 0, "medical": 3, "fuel": 0, "cash": 18},
}

# =============================================================================
# SATISFACTION (0-100 scale)
# =============================================================================
SATISFACTION_BASE: int = 50
SATISFACTION_MIN: int = 0
SATISFACTION_MAX: int = 100

SATISFACTION_FACTORS: dict[str, int] = {
    "reinforced_room": 3,
    "needs_repair": -8,
    "low_personal_food": -10,
    "high_personal_cash": 5,
    "high_building_defense": 4,
    "low_building_defense": -6,
    "emergency_training": 2,
    "building_quality": 3,
    "patrol_system": 4,
    "social_network": 3,
    "elder_harmony_bonus": 2,  # per elder in the building
}
LOW_PERSONAL_FOOD_BELOW: int = 2
HIGH_PERSONAL_CASH_ABOVE: int = 25
HIGH_DEFENSE_AT: int = 8
LOW_DEFENSE_AT: int = 2
RELATIONSHIP_BONUS_RATE: float = 0.2

# Descending (floor, level) table
SATISFACTION_LEVELS: list[tuple[int, str]] = [
    (80, "excellent"),
    (60, "good"),
    (40, "normal"),
    (20, "warning"),
    (0, "critical"),
]
SATISFACTION_ALERT_LEVELS: tuple[str, ...] = ("warning", "critical")
CONFLICT_RESOLUTION_BONUS: int = 10
CONFLICT_RESOLUTION_AFFINITY: int = 10  # feuding pair after mediation

# =============================================================================
# RELATIONSHIPS (0-100 affinity)
# =============================================================================
RELATIONSHIP_NEUTRAL: int = 50
RELATIONSHIP_MIN: int = 0
RELATIONSHIP_MAX: int = 100
RELATIONSHIP_NOISE: int = 10  # uniform integer in [-noise, noise]

COMPATIBILITY_MATRIX: dict[str, dict[str, int]] = {
    "doctor": {"worker": 10, "farmer": 5, "soldier": -5, "elder": 15},
    "worker": {"doctor": 10, "farmer": 15, "soldier": 5, "elder": 0},
    "farmer": {"doctor": 5, "worker": 15, "soldier": -10, "elder": 20},
    "soldier": {"doctor": -5, "worker": 5, "farmer": -10, "elder": -15},
    "elder": {"doctor": 15, "worker": 0, "farmer": 20, "soldier": -15},
}

# =============================================================================
# CONFLICTS
# =============================================================================
CONFLICT_SATISFACTION_THRESHOLD: int = 40
CONFLICT_MIN_DISSATISFIED: int = 2
CONFLICT_FOOD_PER_TENANT: int = 3
CONFLICT_FUEL_MIN: int = 3
CONFLICT_SATISFACTION_BASELINE: float = 70.0  # averages below this raise the chance
CONFLICT_POOR_RELATIONSHIP: int = 20
CONFLICT_INTERPERSONAL_CHANCE: float = 0.3
CONFLICT_SEVERITY: dict[str, int] = {
    "satisfaction_dispute": 3,
    "resource_scarcity": 4,
    "interpersonal_conflict": 2,
}

CONFLICT_PROBABILITY_PARAMS: dict[str, float] = {
    "base_chance": 0.25,
    "tenant_count_multiplier": 0.08,
    "satisfaction_penalty": 0.003,
    "resource_scarcity_bonus": 0.1,
    "elder_reduction": 0.12,
}

# =============================================================================
# EVENTS
# =============================================================================
RANDOM_EVENT_CHANCE: float = 0.3
PROBABILITY_CHECK_DEFAULT_BASE: float = 0.5
EVENT_CATEGORIES: list[str] = ["random", "conflict", "special", "scripted"]

# Load-time limits
MAX_NESTED_CONDITIONS: int = 5
MAX_CHOICES_PER_EVENT: int = 20
MAX_CONDITIONS_PER_CHOICE: int = 10
MAX_EFFECTS_PER_CHOICE: int = 15

# =============================================================================
# HISTORY CAPS
# =============================================================================
MAX_MODIFICATION_HISTORY: int = 100
MAX_TRANSFER_HISTORY: int = 100
MAX_SATISFACTION_HISTORY: int = 100
MAX_EXECUTION_HISTORY: int = 100
EXECUTION_HISTORY_KEEP: int = 50  # entries kept after trimming

# =============================================================================
# VISUALIZATION
# =============================================================================
REPORT_DPI: int = 150
