"""
Events module - Live update stream over Server-Sent Events.
"""
