"""Alternative hosts for the editor controller."""
