"""Application-wide constants and configuration values.

Centralizes element identifiers, event names and defaults shared by the
scheduler, the UI sync layer and the host handle.
"""

from decimal import Decimal

# ============== FEE PRODUCT ==============
DEFAULT_FEE_SKU = "PAYPAL-FEE-3-5"
DEFAULT_FEE_RATE = Decimal("0.035")  # 3.5%
DEFAULT_FEE_VARIANT_ID = 52038356861271  # "PayPal fee 3.5%" variant, unit price 0.01
FEE_LINE_PROPERTY = "_paypal_fee"
FEE_LINE_NOTE = "The quantity shown is the amount in cents (e.g. 350 = 3.50 EUR)"

# ============== SESSION STORAGE ==============
SESSION_KEY_ADDED = "paypal_fee_selected"
SESSION_KEY_DECLINED = "paypal_fee_declined"
SESSION_TTL_SECONDS = 24 * 60 * 60

# ============== TIMING ==============
DEBOUNCE_SECONDS = 0.6
REQUEST_TIMEOUT_SECONDS = 10.0

# ============== PAGE ELEMENTS ==============
CHECKBOX_MAIN = "paypal-fee-checkbox-main"
CHECKBOX_DRAWER = "paypal-fee-checkbox-drawer"
CHECKBOX_PRODUCT = "paypal-fee-checkbox-product"
CART_CHECKBOXES = (CHECKBOX_MAIN, CHECKBOX_DRAWER)
CART_SECTION_TYPE = "cart"
REMOVE_DIALOG_ID = "paypal-fee-remove-modal"

# ============== EVENTS ==============
CART_UPDATED_EVENT = "cart:updated"
FEE_CHANGED_EVENT = "paypal-fee-changed"
ENGINE_ORIGIN = "feesync"

# ============== USER MESSAGES ==============
MSG_ADDING_FEE = "Adding PayPal fee..."
MSG_REMOVING_FEE = "Removing PayPal fee..."
MSG_UPDATE_FAILED = "Error while updating the cart. Please reload the page."
MSG_VARIANT_MISSING = "ERROR: PayPal fee variant is not configured. Please contact support."
MSG_FEE_OUT_OF_STOCK = "The PayPal fee product is not available. Please contact support."
