"""Reusable widgets: grid, cards, modals and dialogs."""
