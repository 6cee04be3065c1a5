"""Application layer: the parking service, DTOs and line commands"""
