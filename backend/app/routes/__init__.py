from . import auth as auth, availability as availability, bookings as bookings, health as health
