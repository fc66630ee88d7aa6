"""
Notification Module
-----------------
Outbound email for the password recovery flow.
Delivery is best-effort: callers log NotifierFailed and carry on.
"""
