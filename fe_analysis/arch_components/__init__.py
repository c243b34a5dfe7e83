"""Split feature effects by architecture component."""
