"""
Session modes and screen names shared by the billing and purchase sessions.

IDLE -> ACTIVE (counterparty chosen) -> IDLE on finalize or cancel.
EDITING is ACTIVE with a finalized record loaded back into the cart.
"""


class SessionMode:
    """Billing / purchase session modes"""
    IDLE = "idle"
    ACTIVE = "active"
    EDITING = "editing"  # Active, re-opened from history


class View:
    """Screens the client can navigate to"""
    # Billing
    MANAGE_STORES = "manage-stores"
    CREATE_BILL = "create-bill"
    YOUR_BILLS = "your-bills"

    # Purchases
    MANAGE_SUPPLIERS = "manage-suppliers"
    PURCHASE_ENTRY = "purchase-entry"
    YOUR_PURCHASES = "your-purchases"

    # Everything else
    INVENTORY = "inventory"
    DASHBOARD = "dashboard"
