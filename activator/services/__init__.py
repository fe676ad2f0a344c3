"""
Activator Services

- observe - Subscription to the peer's temperature resource
- control - Threshold and adaptive control loop
- command - HTTP command endpoint
- device  - Actuator and signal strength collaborators
"""
