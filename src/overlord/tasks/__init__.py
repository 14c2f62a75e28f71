"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskState) and label rendering
- task_identity.py: content-derived task ID and on-disk record path
- task_lifecycle.py: state transition table + worked-time accounting
- task_store.py: JSON record files under the "task" module directory
- task_api.py: small high-level helpers used by callers
- errors.py: exception hierarchy
"""
