"""Presentation layer: console formatting"""
