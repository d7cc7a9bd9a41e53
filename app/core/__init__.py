"""Cross-cutting application concerns"""
