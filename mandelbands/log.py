"""Console logging for the renderer, silent until a caller enables it."""

VERBOSE = False


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


def set_verbose(enabled):
    global VERBOSE
    VERBOSE = bool(enabled)


def quiet_tensorflow(tf):
    """Lower TensorFlow's Python logger to errors."""

    logger = tf.get_logger()
    logger.setLevel("ERROR")
    for handler in logger.handlers:
        handler.setLevel("ERROR")
