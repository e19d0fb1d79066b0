"""
Repository layer
Parameterized SQL over the relational store
"""
