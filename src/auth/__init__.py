"""
Auth Module
---------
Session authentication, the ownership guard and password recovery.
"""
