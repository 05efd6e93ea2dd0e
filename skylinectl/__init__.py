"""Install Skyline plugins to a Switch over FTP and read their logs."""
