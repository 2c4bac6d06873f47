import threading
import uuid
from functools import wraps

from flask import session

from app.utils.errors import SubmissionInProgress

# In-memory registry of requests currently being processed (per process)
in_flight = set()
in_flight_lock = threading.Lock()


def client_id():
    """Stable id for this browser, kept in the session"""
    if 'client_id' not in session:
        session['client_id'] = uuid.uuid4().hex
    return session['client_id']


def single_flight(action):
    """Reject a request while another one for the same action and client is running"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            key = (client_id(), action)

            with in_flight_lock:
                if key in in_flight:
                    raise SubmissionInProgress()
                in_flight.add(key)

            try:
                return f(*args, **kwargs)
            finally:
                with in_flight_lock:
                    in_flight.discard(key)
        return decorated_function
    return decorator
