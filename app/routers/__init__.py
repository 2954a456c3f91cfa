"""
Routers module - API endpoint handlers organized by feature.

- auth: registration and login
- users: profile and directory search
- admin: account management for admins
- events: direct calendar CRUD
- assistant: natural-language propose/confirm
- notifications: inbox
- operation_logs: change history
"""
