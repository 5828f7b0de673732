"""Django project package for the home-care backend."""
