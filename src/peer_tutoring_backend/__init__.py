'''
Peer tutoring backend: tutoring requests, their lifecycle and cleanup.
'''
