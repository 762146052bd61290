"""Built-in event library used when no external event config is supplied."""

from __future__ import annotations

DEFAULT_EVENT_CONFIG: dict = {
    "random_events": [
        {
            "id": "night_raiders",
            "title": "Raiders at Night",
            "description": "Shadows move in the yard. Someone is testing the doors.",
            "priority": 5,
            "conditions": [{"type": "dayRange", "min": 3}],
            "choices": [
                {
                    "id": "hold_the_line",
                    "text": "Barricade and hold the line",
                    "effects": [
                        {
                            "type": "probabilityCheck",
                            "condition": {
                                "base": 0.4,
                                "modifiers": [
                                    {"type": "hasTenantType", "tenantType": "soldier", "bonus": 0.3},
                                    {"type": "hasResource", "resource": "materials", "amount": 5, "bonus": 0.1},
                                ],
                            },
                            "success": [
                                {"type": "logMessage", "message": "The raiders gave up and left.", "logType": "event"},
                            ],
                            "failure": [
                                {"type": "modifyResource", "resource": "food", "amount": -4},
                                {"type": "damageRandomRoom"},
                                {"type": "logMessage", "message": "The raiders broke in and took food.", "logType": "danger"},
                            ],
                        },
                    ],
                },
                {
                    "id": "pay_them_off",
                    "text": "Leave cash by the gate",
                    "conditions": [{"type": "hasResource", "resource": "cash", "amount": 15}],
                    "effects": [
                        {"type": "modifyResource", "resource": "cash", "amount": -15},
                        {"type": "logMessage", "message": "The raiders took the money and moved on."},
                    ],
                },
            ],
        },
        {
            "id": "wandering_trader",
            "title": "Wandering Trader",
            "description": "A trader with a loaded cart asks for shelter for the night.",
            "priority": 3,
            "choices": [
                {
                    "id": "buy_medicine",
                    "text": "Buy medical supplies",
                    "conditions": [{"type": "hasResource", "resource": "cash", "amount": 12}],
                    "effects": [
                        {"type": "modifyResource", "resource": "cash", "amount": -12},
                        {"type": "modifyResource", "resource": "medical", "amount": 3},
                    ],
                },
                {
                    "id": "send_away",
                    "text": "Send the trader away",
                    "effects": [{"type": "logMessage", "message": "The trader walked off into the dusk."}],
                },
            ],
        },
        {
            "id": "storm_damage",
            "title": "Storm",
            "description": "A storm tears at the roof all night.",
            "priority": 5,
            "conditions": [{"type": "probability", "chance": 0.5}],
            "choices": [
                {
                    "id": "weather_it",
                    "text": "Wait it out",
                    "effects": [
                        {"type": "damageRandomRoom"},
                        {"type": "modifyResource", "resource": "fuel", "amount": -1},
                    ],
                },
            ],
            "dynamic_choices": {
                "base": [],
                "conditional": [
                    {
                        "condition": {"type": "hasResource", "resource": "materials", "amount": 3},
                        "choice": {
                            "id": "patch_roof",
                            "text": "Patch the roof with spare materials",
                            "effects": [
                                {"type": "modifyResource", "resource": "materials", "amount": -3},
                                {"type": "modifyState", "path": "building.quality", "value": 1, "operation": "add"},
                            ],
                        },
                    },
                ],
            },
        },
    ],
    "conflict_events": [
        {
            "id": "kitchen_quarrel",
            "title": "Quarrel in the Kitchen",
            "description": "Two tenants are shouting over who ate whose rations.",
            "priority": 4,
            "conditions": [{"type": "hasTenantType", "tenantType": "any", "count": 2}],
            "dynamic_choices": {
                "base": [
                    {
                        "id": "extra_rations",
                        "text": "Hand out extra rations",
                        "conditions": [{"type": "hasResource", "resource": "food", "amount": 4}],
                        "effects": [{"type": "modifyResource", "resource": "food", "amount": -4}],
                    },
                    {
                        "id": "ignore_it",
                        "text": "Stay out of it",
                        "effects": [{"type": "logMessage", "message": "The argument simmers down on its own."}],
                    },
                ],
                "conditional": [
                    {
                        "condition": {"type": "hasTenantType", "tenantType": "elder"},
                        "choice": {
                            "id": "elder_mediates",
                            "text": "Ask the elder to mediate",
                            "effects": [
                                {"type": "modifyState", "path": "building.social_network", "value": True},
                                {"type": "logMessage", "message": "The elder calmed everyone down."},
                            ],
                        },
                    },
                ],
            },
        },
        {
            "id": "hoarding_accusation",
            "title": "Hoarding Accusation",
            "description": "Tenants accuse the landlord of hoarding supplies.",
            "priority": 6,
            "conditions": [
                {
                    "type": "or",
                    "conditions": [
                        {"type": "resourceScarcity", "resource": "food", "threshold": "insufficient"},
                        {"type": "resourceScarcity", "resource": "fuel", "threshold": "critical"},
                    ],
                },
            ],
            "choices": [
                {
                    "id": "open_storeroom",
                    "text": "Open the storeroom for inspection",
                    "effects": [{"type": "logMessage", "message": "Tenants saw how little there is left."}],
                },
                {
                    "id": "post_guard",
                    "text": "Post a guard at the storeroom",
                    "effects": [
                        {
                            "type": "checkSoldierBonus",
                            "effects": [
                                {"type": "modifyState", "path": "building.defense", "value": 1, "operation": "add"},
                            ],
                        },
                    ],
                },
            ],
        },
    ],
    "special_events": [
        {
            "id": "fever_outbreak",
            "title": "Fever",
            "description": "One of the tenants is burning with fever.",
            "priority": 10,
            "conditions": [{"type": "hasTenantType", "tenantType": "infected"}],
            "choices": [
                {
                    "id": "treat",
                    "text": "Use medical supplies",
                    "conditions": [{"type": "hasResource", "resource": "medical", "amount": 2}],
                    "effects": [
                        {"type": "modifyResource", "resource": "medical", "amount": -2},
                        {"type": "healTenant", "target": "infected"},
                    ],
                },
                {
                    "id": "quarantine_out",
                    "text": "Ask them to leave",
                    "effects": [{"type": "removeTenant", "target": "infected"}],
                },
            ],
        },
        {
            "id": "first_week_inspection",
            "title": "Building Inspection",
            "description": "The district warden walks the corridors and takes notes.",
            "priority": 2,
            "conditions": [
                {"type": "dayRange", "min": 5, "max": 9},
                {"type": "probability", "chance": 0.5},
            ],
            "choices": [
                {
                    "id": "show_around",
                    "text": "Show the warden around",
                    "effects": [
                        {"type": "modifyState", "path": "flags.inspected", "value": True},
                        {"type": "modifyState", "path": "building.emergency_training", "value": True},
                    ],
                },
            ],
        },
    ],
}
