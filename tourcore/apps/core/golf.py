# Constantes de golf (WHS) usadas por registro, tarjetas y clasificaciones.
from django.conf import settings

HOLES_PER_ROUND = 18

STANDARD_SLOPE_RATING = 113
MIN_SLOPE_RATING = 55
MAX_SLOPE_RATING = 155

# Marcas de hoyo en la tarjeta
UNPLAYED_HOLE = 0
PICKED_UP = -1  # "levantó la bola": no suma y deja la tarjeta incompleta

# Tope de golpes anotables en un hoyo
MAX_SHOTS_PER_HOLE = 20

# Segmentos de desempate (count-back): últimos 9, 6, 3 y 1 hoyos
COUNT_BACK_SEGMENTS = (9, 6, 3, 1)


def max_group_size() -> int:
    return int(getattr(settings, "GOLF_MAX_GROUP_SIZE", 4))


def standard_slope() -> int:
    return int(getattr(settings, "GOLF_STANDARD_SLOPE", STANDARD_SLOPE_RATING))
