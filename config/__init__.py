"""Configuration package for the Socket.IO client.

Holds the optional `client_config.json` read by utils.config_loader.
Example:

    {
      "client": {"url": "http://localhost:3000", "resource": "/socket.io"},
      "logging": {"level": "DEBUG"}
    }
"""
