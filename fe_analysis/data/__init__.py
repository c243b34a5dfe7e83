"""Reading and writing of analysis inputs and results."""
