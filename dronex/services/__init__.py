"""DroneX backend services.

- triage_service: emergency classification and escalation decisions
  for chat messages and voice transcripts
"""
