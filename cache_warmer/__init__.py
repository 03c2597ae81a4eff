"""Watch a Symfony project and refresh its cache whenever a file changes."""
