"""Flet desktop front end for the installer."""
