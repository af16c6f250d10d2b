"""
Tablas de referencia del mercado inmobiliario indio.

Datos estáticos usados por los generadores de listings y por las
fórmulas de scoring: builders por ciudad, localidades, precios base,
coordenadas, zonas geográficas, etc.

Todas las tablas están indexadas por el nombre canónico de la ciudad
(ver ``canonical_city``).
"""

from typing import Optional

# Alias -> nombre canónico
CITY_ALIASES = {
    "bangalore": "Bengaluru",
    "bengaluru": "Bengaluru",
    "gurgaon": "Gurugram",
    "gurugram": "Gurugram",
    "new delhi": "Delhi",
    "bombay": "Mumbai",
    "madras": "Chennai",
    "calcutta": "Kolkata",
}


def canonical_city(name: Optional[str]) -> str:
    """
    Normaliza el nombre de una ciudad.

    Resuelve alias conocidos (Bangalore -> Bengaluru, Gurgaon -> Gurugram)
    y capitaliza el resto sin modificar su ortografía.
    """
    if not name:
        return ""
    words = name.split()
    alias = CITY_ALIASES.get(" ".join(words).lower())
    if alias:
        return alias
    return " ".join(word[:1].upper() + word[1:] for word in words)


BUILDERS_BY_CITY = {
    "Mumbai": [
        "Lodha Group",
        "Godrej Properties",
        "Oberoi Realty",
        "Hiranandani Group",
        "Kalpataru Group",
        "Rustomjee",
    ],
    "Delhi": [
        "DLF Limited",
        "Godrej Properties",
        "Tata Housing",
        "Ansal API",
        "Unitech Limited",
    ],
    "Gurugram": [
        "DLF Limited",
        "Godrej Properties",
        "M3M Group",
        "Emaar India",
        "Sobha Limited",
    ],
    "Bengaluru": [
        "Prestige Group",
        "Brigade Group",
        "Sobha Limited",
        "Puravankara",
        "Salarpuria Sattva",
    ],
    "Pune": [
        "Godrej Properties",
        "Kolte Patil",
        "Gera Developments",
        "Rohan Builders",
        "Puranik Builders",
    ],
    "Hyderabad": [
        "My Home Group",
        "Prestige Group",
        "Sobha Limited",
        "Aparna Constructions",
        "Aliens Group",
    ],
    "Chennai": [
        "Prestige Group",
        "Brigade Group",
        "Sobha Limited",
        "Casagrand",
        "Shriram Properties",
    ],
    "Ahmedabad": [
        "Adani Realty",
        "Goyal & Co",
        "Shivalik Group",
        "Safal Group",
        "Sheetal Group",
    ],
    "Kolkata": [
        "Ambuja Neotia",
        "PS Group",
        "Merlin Group",
        "Sugam Group",
        "Srijan Realty",
    ],
}

FALLBACK_BUILDERS = ["Local Builder", "Regional Developer"]

LOCALITIES_BY_CITY = {
    "Mumbai": ["Bandra West", "Andheri West", "Powai", "Lower Parel", "Worli"],
    "Delhi": ["Dwarka", "Rohini", "Saket", "Vasant Kunj", "Greater Kailash"],
    "Gurugram": ["DLF Phase 1", "Sector 49", "Golf Course Road", "Sohna Road", "MG Road"],
    "Bengaluru": ["Whitefield", "Electronic City", "Koramangala", "HSR Layout", "Indiranagar"],
    "Pune": ["Baner", "Hinjewadi", "Kharadi", "Wakad", "Aundh"],
    "Hyderabad": ["HITEC City", "Gachibowli", "Kondapur", "Madhapur", "Banjara Hills"],
    "Chennai": ["OMR", "Anna Nagar", "Adyar", "Velachery", "Porur"],
    "Ahmedabad": ["Satellite", "Vastrapur", "Bodakdev", "SG Highway", "Prahlad Nagar"],
    "Kolkata": ["Salt Lake", "New Town", "Ballygunge", "Rajarhat", "Behala"],
}

FALLBACK_LOCALITIES = ["Central Area"]

CITY_COORDINATES = {
    "Mumbai": (19.0760, 72.8777),
    "Delhi": (28.7041, 77.1025),
    "Gurugram": (28.4595, 77.0266),
    "Bengaluru": (12.9716, 77.5946),
    "Pune": (18.5204, 73.8567),
    "Hyderabad": (17.3850, 78.4867),
    "Chennai": (13.0827, 80.2707),
    "Ahmedabad": (23.0225, 72.5714),
    "Kolkata": (22.5726, 88.3639),
}

DEFAULT_COORDINATES = (28.7041, 77.1025)

# Precio base por sqft (INR) de la ingesta
BASE_PRICE_PER_SQFT = {
    "Mumbai": 18000,
    "Delhi": 15000,
    "Gurugram": 12000,
    "Bengaluru": 10000,
    "Pune": 8000,
    "Hyderabad": 7000,
    "Chennai": 7500,
    "Ahmedabad": 5500,
    "Kolkata": 6000,
}

DEFAULT_BASE_PRICE_PER_SQFT = 6000

SOURCE_PRICE_MULTIPLIERS = {
    "Housing.com": 1.05,
    "99acres.com": 1.02,
    "MagicBricks.com": 1.08,
    "NoBroker.in": 0.98,
}

SOURCE_BASE_URLS = {
    "Housing.com": "https://housing.com",
    "99acres.com": "https://www.99acres.com",
    "MagicBricks.com": "https://www.magicbricks.com",
    "NoBroker.in": "https://www.nobroker.in",
}

STATE_BY_CITY = {
    "Mumbai": "Maharashtra",
    "Delhi": "Delhi",
    "Gurugram": "Haryana",
    "Noida": "Uttar Pradesh",
    "Ghaziabad": "Uttar Pradesh",
    "Bengaluru": "Karnataka",
    "Pune": "Maharashtra",
    "Hyderabad": "Telangana",
    "Chennai": "Tamil Nadu",
    "Ahmedabad": "Gujarat",
    "Kolkata": "West Bengal",
}

RERA_STATE_CODES = {
    "Mumbai": "MH",
    "Delhi": "DL",
    "Gurugram": "HR",
    "Bengaluru": "KA",
    "Pune": "MH",
    "Hyderabad": "TG",
    "Chennai": "TN",
    "Ahmedabad": "GJ",
    "Kolkata": "WB",
}

BUILDER_NAME_NORMALIZATIONS = {
    "DLF Ltd": "DLF Limited",
    "Godrej Prop": "Godrej Properties",
    "Prestige Grp": "Prestige Group",
    "Brigade Grp": "Brigade Group",
}

# Rangos de carpet area (sqft) por configuración
BHK_AREA_RANGES = {
    "1BHK": (450, 650),
    "2BHK": (800, 1200),
    "3BHK": (1200, 1800),
    "4BHK": (1800, 2500),
}

DEFAULT_AREA_RANGE = (800, 1200)

PROJECT_SUFFIXES = [
    "Heights",
    "Residency",
    "Gardens",
    "Plaza",
    "Towers",
    "Enclave",
    "Vista",
    "Grandeur",
    "Elite",
    "Signature",
]

POSSESSION_OPTIONS = ["Ready", "Dec 2024", "Mar 2025", "Jun 2025", "Dec 2025", "Mar 2026"]

AMENITIES = [
    "Swimming Pool",
    "Gym",
    "Clubhouse",
    "Security",
    "Power Backup",
    "Parking",
    "Garden",
    "Children Play Area",
    "Jogging Track",
    "Lift",
    "CCTV",
    "Intercom",
    "Fire Safety",
    "Rainwater Harvesting",
]

# Localidades con tendencia premium (motor inteligente)
PREMIUM_TREND_LOCALITIES = {
    "Mumbai": ["Bandra West", "Lower Parel", "Worli"],
    "Delhi": ["Saket", "Greater Kailash", "Vasant Kunj"],
    "Bengaluru": ["Koramangala", "Indiranagar", "Whitefield"],
    "Pune": ["Baner", "Hinjewadi", "Kharadi"],
}

# Precio promedio por sqft por ciudad y configuración
MARKET_AVERAGE_PRICE_PER_SQFT = {
    "Mumbai": {"1BHK": 16000, "2BHK": 18000, "3BHK": 20000, "4BHK": 22000},
    "Delhi": {"1BHK": 12000, "2BHK": 14000, "3BHK": 16000, "4BHK": 18000},
    "Bengaluru": {"1BHK": 8000, "2BHK": 9500, "3BHK": 11000, "4BHK": 13000},
    "Pune": {"1BHK": 6500, "2BHK": 7500, "3BHK": 8500, "4BHK": 10000},
}

DEFAULT_MARKET_AVERAGE_PRICE_PER_SQFT = 8000

# Listas del scoring unificado
UNIFIED_TIER1_CITIES = ["Mumbai", "Delhi", "Bengaluru", "Pune", "Hyderabad", "Chennai"]
UNIFIED_PREMIUM_LOCALITIES = ["Bandra", "Gurgaon", "Whitefield", "Koramangala", "HITEC City"]
PREMIUM_BUILDERS = ["DLF", "Godrej", "Prestige", "Brigade", "Sobha", "Oberoi", "Lodha"]

# Builders agrupados por tipo para el servicio de diversidad
DIVERSE_BUILDERS = {
    "National": [
        "DLF Limited",
        "Godrej Properties",
        "Prestige Group",
        "Brigade Group",
        "Sobha Limited",
        "Oberoi Realty",
        "Lodha Group",
    ],
    "Regional": [
        "Kolte Patil",
        "Puravankara",
        "Shriram Properties",
        "Phoenix Mills",
        "Mahindra Lifespace",
        "Tata Housing",
    ],
    "Local": [
        "Rohan Builders",
        "Goel Ganga",
        "Kalpataru Group",
        "Rustomjee",
        "Runwal Group",
        "Piramal Realty",
    ],
    "Boutique": [
        "Ashwin Architects",
        "Studio Lotus",
        "Morphogenesis",
        "CP Kukreja",
        "Hafeez Contractor",
    ],
}

# Ciudad -> zona -> localidad -> (micro mercados, coordenadas)
GEOGRAPHICAL_ZONES = {
    "Mumbai": {
        "Western Suburbs": {
            "Bandra West": (
                ["Linking Road", "Carter Road", "Hill Road", "SV Road"],
                (19.0596, 72.8295),
            ),
            "Andheri West": (
                ["Lokhandwala", "Versova", "JP Road", "DN Nagar"],
                (19.1136, 72.8697),
            ),
            "Malad West": (
                ["Mindspace", "Infinity Mall Area", "Link Road", "Marve Road"],
                (19.1875, 72.8489),
            ),
        },
        "Central Mumbai": {
            "Lower Parel": (
                ["Phoenix Mills", "Kamala Mills", "Senapati Bapat Marg", "Elphinstone Road"],
                (19.0176, 72.8562),
            ),
            "Worli": (
                ["Worli Sea Face", "Lotus Mills", "Annie Besant Road", "Worli Village"],
                (19.0176, 72.8156),
            ),
        },
    },
    "Delhi": {
        "South Delhi": {
            "Saket": (
                ["Select City Walk", "Saket Metro", "Press Enclave", "Malviya Nagar Border"],
                (28.5245, 77.2066),
            ),
            "Greater Kailash": (
                ["GK-1 M Block", "GK-2 R Block", "Kailash Colony", "Nehru Place Border"],
                (28.5494, 77.2425),
            ),
        },
        "West Delhi": {
            "Dwarka": (
                ["Sector 12", "Sector 19", "Sector 23", "Dwarka Expressway"],
                (28.5921, 77.0460),
            ),
        },
    },
    "Bengaluru": {
        "East Bangalore": {
            "Whitefield": (
                ["ITPL Main Road", "Varthur Road", "Brookefield", "Kadugodi"],
                (12.9698, 77.7500),
            ),
            "Electronic City": (
                ["Phase 1", "Phase 2", "Bommasandra", "Hebbagodi"],
                (12.8456, 77.6603),
            ),
        },
        "South Bangalore": {
            "Koramangala": (
                ["5th Block", "6th Block", "8th Block", "Forum Mall Area"],
                (12.9279, 77.6271),
            ),
        },
    },
}

# Precio total base por segmento (INR)
SEGMENT_BASE_PRICES = {
    "Mumbai": {"Affordable": 8000000, "Mid-Range": 18000000, "Premium": 35000000, "Ultra-Premium": 80000000},
    "Delhi": {"Affordable": 6000000, "Mid-Range": 15000000, "Premium": 30000000, "Ultra-Premium": 70000000},
    "Bengaluru": {"Affordable": 4000000, "Mid-Range": 10000000, "Premium": 20000000, "Ultra-Premium": 50000000},
}

SEGMENT_PRICE_PER_SQFT = {
    "Mumbai": {"Affordable": 12000, "Mid-Range": 18000, "Premium": 25000, "Ultra-Premium": 40000},
    "Delhi": {"Affordable": 8000, "Mid-Range": 15000, "Premium": 22000, "Ultra-Premium": 35000},
    "Bengaluru": {"Affordable": 6000, "Mid-Range": 10000, "Premium": 16000, "Ultra-Premium": 25000},
}

SEGMENT_AMENITIES = {
    "Affordable": ["Garden", "Children Play Area", "Water Supply"],
    "Mid-Range": ["Gym", "Swimming Pool", "Clubhouse", "Jogging Track"],
    "Premium": ["Spa", "Tennis Court", "Concierge", "Private Garden", "Home Theater"],
    "Ultra-Premium": ["Helipad", "Wine Cellar", "Private Elevator", "Butler Service", "Infinity Pool"],
}

SEGMENT_ADJECTIVES = {
    "Affordable": ["Comfortable", "Cozy", "Smart", "Value"],
    "Mid-Range": ["Modern", "Elegant", "Spacious", "Contemporary"],
    "Premium": ["Luxury", "Premium", "Elite", "Exclusive"],
    "Ultra-Premium": ["Ultra-Luxury", "Signature", "Platinum", "Royal"],
}

IMAGE_URL_TEMPLATE = "https://images.unsplash.com/photo-{photo_id}?w=800&h=600&fit=crop"


def get_localities(city: str) -> list[str]:
    """Localidades conocidas de una ciudad (fallback: 'Central Area')."""
    return LOCALITIES_BY_CITY.get(canonical_city(city), FALLBACK_LOCALITIES)


def get_builders(city: str) -> list[str]:
    """Builders registrados en una ciudad (lista vacía si no hay datos)."""
    return BUILDERS_BY_CITY.get(canonical_city(city), [])


def get_market_average_price(city: str, bhk: str) -> int:
    """Precio promedio de mercado por sqft para ciudad + configuración."""
    by_bhk = MARKET_AVERAGE_PRICE_PER_SQFT.get(canonical_city(city), {})
    return by_bhk.get(bhk, DEFAULT_MARKET_AVERAGE_PRICE_PER_SQFT)
