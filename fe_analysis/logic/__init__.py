"""Boolean formulas and the operations the analyses build on."""
