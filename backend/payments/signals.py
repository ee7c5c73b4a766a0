from django.dispatch import Signal

# Custom payment signals
#
# payment_completed: sent once an order has been paid (counter payment or
#   rider settlement). kwargs: order, transaction
payment_completed = Signal()
