"""Timer core: state machine, clock, broadcast and command gateway."""
