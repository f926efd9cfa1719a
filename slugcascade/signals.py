from django.dispatch import Signal

# Page signals

# provides args: instance, instance_before, correlation_id, user
page_slug_changed = Signal()


# Broadcast signals

# provides args: message
slug_changed_broadcast = Signal()
