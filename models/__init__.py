"""
Models package for the RAG Deadlock Detector.
Contains the process and resource records, the graph store and its errors.
"""
