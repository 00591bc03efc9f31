"""
Task subsystem.

Components:
- priority.py: TaskPriority levels
- task_models.py: Task / TimeTrack records and the time-tracking state machine
- scoring.py: urgency score
- task_store.py: one YAML file per task, locked writes with backup rotation
- task_api.py: high-level operations used by the front end
"""
