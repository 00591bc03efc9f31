"""
Note subsystem: one markdown note per task, stored beside the tasks in notes/.
A note outlives its task; "orphaned" is decided at query time by probing the task file.
"""
