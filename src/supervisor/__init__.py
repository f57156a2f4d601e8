"""
Restart supervisor: sequences campaigns and recovers from crashes.
"""

from src.supervisor.restart import RestartSupervisor, SupervisorResult

__all__ = ["RestartSupervisor", "SupervisorResult"]
