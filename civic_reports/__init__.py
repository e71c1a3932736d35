"""Civic issue reporting: submit, browse, search and filter issue reports."""
