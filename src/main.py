# Command line entry point for generating and running brackets

import argparse
import logging
import os
import sys

import yaml

from bracket.elimination import generate_bracket
from bracket.errors import BracketError
from bracket.models import participants_from_entries
from bracket.service import BracketService
from bracket.store import MatchStore


def load_participants(file_path, tournament_id):
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if isinstance(data, dict):
        data = data.get('participants', [])
    return participants_from_entries(data, tournament_id)


def _name(participant):
    return participant.display_name if participant else 'TBD'


def print_bracket(bracket):
    for r in bracket.rounds:
        print(f"\n# {r.name}")
        for match in r.matches:
            if match.is_bye:
                print(f"  M{match.match_number}: {_name(match.player1)} (bye)")
                continue
            line = f"  M{match.match_number}: {_name(match.player1)} vs {_name(match.player2)}"
            if match.is_completed:
                line += f"  {match.player1_score}-{match.player2_score}, winner {_name(match.winner)}"
            print(line)
    if bracket.champion:
        print(f"\nChampion: {bracket.champion.display_name}")


def print_stats(stats):
    print(f"Matches: {stats['completed_matches']}/{stats['total_matches']} completed "
          f"({stats['progress']}%), {stats['playable_matches']} ready to play")
    print(f"Round {stats['current_round']} of {stats['total_rounds']}, "
          f"{stats['total_participants']} participants")


def cmd_generate(args):
    participants = load_participants(args.participants_file, args.tournament_id)
    if args.data_dir:
        service = BracketService(MatchStore(args.data_dir))
        service.set_participants(args.tournament_id, participants)
        bracket = service.generate(args.tournament_id)
    else:
        bracket, _ = generate_bracket(participants, args.tournament_id)
    print_bracket(bracket)


def cmd_report(args):
    service = BracketService(MatchStore(args.data_dir))
    bracket = service.report_result(args.tournament_id, args.round, args.match,
                                    args.winner, args.score1, args.score2)
    print_bracket(bracket)


def cmd_show(args):
    bracket = BracketService(MatchStore(args.data_dir)).get_bracket(args.tournament_id)
    if bracket is None:
        print(f"No bracket for tournament {args.tournament_id}", file=sys.stderr)
        return 1
    print_bracket(bracket)


def cmd_stats(args):
    stats = BracketService(MatchStore(args.data_dir)).get_stats(args.tournament_id)
    if stats is None:
        print(f"No bracket for tournament {args.tournament_id}", file=sys.stderr)
        return 1
    print_stats(stats)


def build_parser():
    default_data_dir = os.environ.get('BRACKET_DATA_DIR')

    parser = argparse.ArgumentParser(description='Single elimination bracket tool')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log engine activity')
    subparsers = parser.add_subparsers(dest='command', required=True)

    generate = subparsers.add_parser('generate', help='Generate a bracket from a participants YAML file')
    generate.add_argument('participants_file')
    generate.add_argument('--tournament-id', required=True)
    generate.add_argument('--data-dir', default=default_data_dir,
                          help='Store the bracket here (default: $BRACKET_DATA_DIR, print only if unset)')
    generate.set_defaults(func=cmd_generate)

    report = subparsers.add_parser('report', help='Record a match result')
    report.add_argument('--tournament-id', required=True)
    report.add_argument('--data-dir', default=default_data_dir, required=default_data_dir is None)
    report.add_argument('--round', type=int, required=True)
    report.add_argument('--match', type=int, required=True)
    report.add_argument('--winner', required=True, help='Winning participant id')
    report.add_argument('--score1', type=int, default=0)
    report.add_argument('--score2', type=int, default=0)
    report.set_defaults(func=cmd_report)

    for name, func, help_text in (('show', cmd_show, 'Print a stored bracket'),
                                  ('stats', cmd_stats, 'Print bracket progress')):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--tournament-id', required=True)
        sub.add_argument('--data-dir', default=default_data_dir, required=default_data_dir is None)
        sub.set_defaults(func=func)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')
    try:
        return args.func(args) or 0
    except (BracketError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
