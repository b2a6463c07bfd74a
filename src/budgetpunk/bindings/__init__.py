"""Bindings between data loading state and the overlay indicators."""
