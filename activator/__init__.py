"""
Fan Activator

Closed-loop fan controller for a sensor-network node:
- services/observe  - remote temperature feed, history buffer
- services/control  - threshold store, adaptive control loop
- services/command  - remote command endpoint
- services/device   - actuator and signal strength collaborators
- simulator         - virtual temperature peer
"""

__version__ = "1.0.0"
