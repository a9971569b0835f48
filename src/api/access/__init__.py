"""Access bounded context.

Tenant hierarchy, registration codes, platform roles, the audit trail and
the onboarding workflow that ties codes to user profiles.
"""
