"""Meal planning tools."""
