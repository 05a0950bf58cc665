"""An HTTP caching proxy built from client, proxy, cache and origin roles over Redis."""