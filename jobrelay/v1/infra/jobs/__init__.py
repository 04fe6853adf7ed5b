"""
Push-queue background jobs.

This package provides:
- A durable job store with atomic, status-guarded transitions
- Publishing job messages to the push-queue
- The signed worker webhook that runs each job to a terminal state
- Registry-based handlers, one per job kind
"""
