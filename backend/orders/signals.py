from django.dispatch import Signal

# Custom signals that other apps can listen to.
#
# order_status_changed: sent after an order's status is written.
#   kwargs: order, old_status, new_status, user
# order_items_changed: sent after item statuses or lines change without
#   necessarily changing the order status (kitchen displays refresh on it).
#   kwargs: order, items
order_status_changed = Signal()
order_items_changed = Signal()
