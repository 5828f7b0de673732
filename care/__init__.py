"""Home-care domain app: profiles, appointments, medications and notifications."""
