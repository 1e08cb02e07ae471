"""Live voice assistant relay.

Bridges a microphone stream to a remote bidirectional audio session and
sequences the returned audio for gap-free playback while collecting a transcript.
"""
