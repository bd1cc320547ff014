import logging

import click

from . import Beatmap
from .cli import MODS, maybe_show_progress
from .osu import OsuPerformance, StarsVersion, stars as osu_stars
from .taiko import TaikoGradualDifficulty

beatmap_argument = click.argument(
    'path',
    type=click.Path(exists=True, dir_okay=False),
)
mods_option = click.option(
    '--mods',
    type=MODS,
    default=0,
    help='The mods to apply, for example HDDT.',
)


@click.group()
@click.option(
    '--verbose/--no-verbose',
    help='Log debug information?',
    default=False,
)
def main(verbose):
    """Star rating and performance point utilities.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(name)s %(levelname)s: %(message)s',
        )


@main.command()
@beatmap_argument
@mods_option
@click.option(
    '--version',
    type=click.Choice([version.value for version in StarsVersion]),
    default=StarsVersion.all_included.value,
    help='The star rating algorithm version.',
)
def stars(path, mods, version):
    """Print the difficulty attributes of an osu! standard map.
    """
    attributes = osu_stars(Beatmap.from_path(path), mods, version=version)
    for field, value in attributes._asdict().items():
        click.echo(f'{field}: {value}')


@main.command()
@beatmap_argument
@mods_option
@click.option('--accuracy', type=click.FloatRange(0, 100), default=None)
@click.option('--combo', type=click.IntRange(min=0), default=None)
@click.option('--n300', type=click.IntRange(min=0), default=None)
@click.option('--n100', type=click.IntRange(min=0), default=None)
@click.option('--n50', type=click.IntRange(min=0), default=None)
@click.option('--misses', type=click.IntRange(min=0), default=0)
@click.option('--passed-objects', type=click.IntRange(min=0), default=None)
def pp(path, mods, accuracy, combo, n300, n100, n50, misses, passed_objects):
    """Print the performance breakdown of a play on an osu! standard map.
    """
    result = OsuPerformance(
        mods=mods,
        combo=combo,
        accuracy=accuracy,
        n300=n300,
        n100=n100,
        n50=n50,
        misses=misses,
        passed_objects=passed_objects,
    ).calculate(Beatmap.from_path(path))

    click.echo(f'stars: {result.stars}')
    for field in ('pp', 'pp_aim', 'pp_speed', 'pp_acc', 'pp_flashlight'):
        click.echo(f'{field}: {getattr(result, field)}')
    click.echo(f'effective_misses: {result.effective_misses}')


@main.command()
@beatmap_argument
@mods_option
@click.option(
    '--progress/--no-progress',
    help='Show a progress bar?',
    default=False,
)
def gradual(path, mods, progress):
    """Print the star rating of an osu!taiko map after every hit.
    """
    difficulty = TaikoGradualDifficulty(Beatmap.from_path(path), mods)
    star_ratings = []
    with maybe_show_progress(
            difficulty,
            progress,
            length=len(difficulty),
            label='Rating hits',
    ) as it:
        for attributes in it:
            star_ratings.append(attributes.stars)

    for n, star_rating in enumerate(star_ratings, 1):
        click.echo(f'{n}: {star_rating}')


if __name__ == '__main__':
    main()
