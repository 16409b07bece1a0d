"""Business operations. Each takes the session and the acting principal explicitly."""
