"""Tools package initialization"""
