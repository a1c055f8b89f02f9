"""HTTP surface — pass-through proxies, overlay endpoints and the server runner."""
