"""
Vector-motion racing simulation on discrete grid tracks.

The engine subpackage holds the track model, motion rules, landing-region
analysis and the CPU move strategies; ``config`` exposes the strategy
balance file shared by all of them.
"""
