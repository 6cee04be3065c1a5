"""Domain layer: value objects, the log table, ordering, pricing and billing"""
