"Errors raised while resolving an AddressSpec or running socket operations on it."

__all__ = [
    "ResolutionError",
    "UnsupportedSpecification",
    "TransientAcceptError",
    "FatalSocketError",
]

class ResolutionError(OSError):
    """The specification could not be turned into a concrete address.

    Bad host, port or path, or the resolver wasn't reachable. Nothing is
    cached when this is raised, so resolving again will retry the lookup.

    """
    pass

class UnsupportedSpecification(TypeError):
    "The specification isn't one of the kinds the requested operation knows how to handle."
    pass

class TransientAcceptError(OSError):
    """A single accept failed in a way that doesn't affect the listening socket.

    The accept loop logs these and keeps going; they are never raised to the caller.
    """
    pass

class FatalSocketError(OSError):
    "The socket itself couldn't be set up or became unusable; the current operation is over."
    pass

def from_oserror(cls, exn: Exception, *args: object) -> OSError:
    "Build an error of type `cls` carrying the errno and strerror of `exn`, with extra context appended"
    errno = getattr(exn, 'errno', None)
    if errno is None:
        # a single argument, so that OSError doesn't take the message for an errno
        return cls(": ".join(map(str, [exn, *args])))
    return cls(errno, f"{exn.strerror}: {', '.join(map(str, args))}" if args else exn.strerror) # type: ignore
