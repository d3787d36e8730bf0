"""Static first-run catalog and demo counterparties."""
import re

SEED_MEDICINES = [
    {"name": "Panadol Tab 500mg", "company": "GSK", "type": "TAB", "discount": 10, "sale_discount": 5},
    {"name": "Panadol Extra Tab", "company": "GSK", "type": "TAB", "discount": 10, "sale_discount": 5},
    {"name": "Augmentin 625mg Tab", "company": "GSK", "type": "TAB", "discount": 12, "sale_discount": 6},
    {"name": "Brufen Syp 90ml", "company": "Abbott", "type": "SYP", "discount": 15, "sale_discount": 8},
    {"name": "Calpol Syp 60ml", "company": "GSK", "type": "SYP", "discount": 12, "sale_discount": 6},
    {"name": "Arinac Forte Tab", "company": "Abbott", "type": "TAB", "discount": 10, "sale_discount": 5},
    {"name": "Flagyl 400mg Tab", "company": "Sanofi", "type": "TAB", "discount": 12, "sale_discount": 6},
    {"name": "Risek 20mg Cap", "company": "Getz Pharma", "type": "CAP", "discount": 15, "sale_discount": 7},
    {"name": "Gravinate Inj", "company": "Searle", "type": "INJ", "discount": 8, "sale_discount": 4},
    {"name": "Polyfax Oint", "company": "GSK", "type": "OINT", "discount": 10, "sale_discount": 5},
    {"name": "Betnovate Cream", "company": "GSK", "type": "CREAM", "discount": 10, "sale_discount": 5},
    {"name": "Otrivin Drops", "company": "Novartis", "type": "DROPS", "discount": 9, "sale_discount": 4},
    {"name": "ORS Sac", "company": "Searle", "type": "SAC", "discount": 5, "sale_discount": 2},
    {"name": "Hydrillin Syp", "company": "Searle", "type": "SYP", "discount": 14, "sale_discount": 7},
    {"name": "Softin Tab", "company": "Hilton Pharma", "type": "TAB", "discount": 10, "sale_discount": 5},
]

DEMO_STORE = {"name": "Demo Medical Store", "address": "Main Bazar"}
DEMO_SUPPLIER = {"name": "Demo Supplier", "address": "Wholesale Market", "contact_person": None, "phone": None}

_SLUG_PATTERN = re.compile(r"[^a-zA-Z0-9]")


def seed_medicine_id(index: int, name: str) -> str:
    """Stable id for the index-th seed entry: med-<index>-<slug>."""
    return f"med-{index}-{_SLUG_PATTERN.sub('-', name).lower()}"
