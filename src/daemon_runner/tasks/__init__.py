"""
Task subsystem.

Components:
- task_models.py: data structures (Task, RunnerState, options and outcome types)
- task_queue.py: insertion-ordered, deduplicating task container
- async_gate.py: serializes invocations of tasks whose callbacks return awaitables
- task_runner.py: tick loop, evaluation cycle and lifecycle state machine
"""
