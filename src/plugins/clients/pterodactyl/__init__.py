from plugins.clients.pterodactyl.client import PterodactylClient

__all__ = ["PterodactylClient"]
