"""
Country lookup tables.

ISO-3166 names come from pycountry; only the spellings it does not know
live here.

MANUAL_ALIAS_TO_ISO2 covers messy real-world spellings. Keys are already
normalized (lowercase ASCII letters only, accents stripped).
"""

# ---------------------------------------------------------------------------
# Manual aliases (normalized key → ISO-2)
# ---------------------------------------------------------------------------
MANUAL_ALIAS_TO_ISO2: dict[str, str] = {
    # Ethiopia
    "ethiopia": "ET",
    "ethiopian": "ET",
    "eth": "ET",
    "ethio": "ET",
    "ethi": "ET",
    # United States
    "usa": "US",
    "us": "US",
    "america": "US",
    "unitedstates": "US",
    "unitedstatesofamerica": "US",
    "amerika": "US",
    "ame": "US",
    "unitedstatesamerica": "US",
    "unitedstatesa": "US",
    # United Kingdom
    "uk": "GB",
    "unitedkingdom": "GB",
    "greatbritain": "GB",
    "britain": "GB",
    "england": "GB",
    "scotland": "GB",
    "wales": "GB",
    "northernireland": "GB",
    # Western Europe
    "germany": "DE",
    "deutschland": "DE",
    "ger": "DE",
    "france": "FR",
    "fr": "FR",
    "holland": "NL",
    "netherlands": "NL",
    "spain": "ES",
    "italy": "IT",
    "poland": "PL",
    "czechia": "CZ",
    "czechrepublic": "CZ",
    "sweden": "SE",
    "norway": "NO",
    "denmark": "DK",
    # South and East Asia
    "india": "IN",
    "bharat": "IN",
    "china": "CN",
    "prc": "CN",
    "peoplesrepublicofchina": "CN",
    "southkorea": "KR",
    "republicofkorea": "KR",
    "japan": "JP",
    # Middle East
    "uae": "AE",
    "unitedarabemirates": "AE",
    "ksa": "SA",
    "saudiarabia": "SA",
    "turkiye": "TR",
    "turkey": "TR",
    # East Africa and the Horn
    "kenya": "KE",
    "uganda": "UG",
    "tanzania": "TZ",
    "rwanda": "RW",
    "burundi": "BI",
    "somalia": "SO",
    "djibouti": "DJ",
    "eritrea": "ER",
    # Southern Africa
    "southafrica": "ZA",
    "sa": "ZA",
    "botswana": "BW",
    "namibia": "NA",
    "zambia": "ZM",
    "zimbabwe": "ZW",
    "malawi": "MW",
    # West Africa
    "ivorycoast": "CI",
    "cotedivoire": "CI",
    "nigeria": "NG",
    "ghana": "GH",
    "senegal": "SN",
    "sierraleone": "SL",
    "liberia": "LR",
    "benin": "BJ",
    "togo": "TG",
    "guinea": "GN",
    "guineabissau": "GW",
    "niger": "NE",
    "burkinafaso": "BF",
    "mali": "ML",
    # North Africa
    "egypt": "EG",
    "morocco": "MA",
    "algeria": "DZ",
    "tunisia": "TN",
    "libya": "LY",
    # Central Africa
    "cameroon": "CM",
    "congodemocraticrepublic": "CD",
    "drc": "CD",
    "congo": "CG",
    "angola": "AO",
    "mozambique": "MZ",
}

# Fuzzy matches on shorter keys are too noisy ("mars" → Marshall Islands).
FUZZY_MIN_KEY_LENGTH: int = 5

# ---------------------------------------------------------------------------
# Country literals recognised inside free text (blob and column sniffing)
# ---------------------------------------------------------------------------
COUNTRY_LITERALS: list[str] = [
    "ethiopia",
    "india",
    "germany",
    "china",
    "united states",
    "united kingdom",
    "france",
    "italy",
    "spain",
    "kenya",
    "south africa",
]
