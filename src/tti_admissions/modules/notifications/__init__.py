"""
Notifications Module

In-app notifications for reviewers and the dispatcher for outward
email/SMS/push delivery.
"""
