"""Application composition layer.

``controller`` wires adapters and use cases from settings, ``card_workflow``
holds the board state, and ``main`` exposes both as a command line tool.
"""
