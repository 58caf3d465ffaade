"""
Network-backed results source for the official PCSO lotto results search page
"""

import re
from datetime import date, datetime
from typing import Dict, List, Optional

import requests
from bs4 import BeautifulSoup

from config import AppConfig
from core.data_validator import DataValidator
from data_sources.base import DataSourceError, ResultsDataSource
from schema import DrawRecord, FetchResult


class PCSOResultsScraper(ResultsDataSource):
    """
    Scrapes the PCSO "Search Lotto Result" page.

    The page is an ASP.NET form: a GET yields the hidden state fields, a POST
    with the date range returns a grid covering every lotto game. Rows are
    filtered to the requested game and range locally.
    """

    source_name = 'PCSO Official Website'

    RESULTS_TABLE_ID = 'cphContainer_cpContent_GridView1'
    FORM_PREFIX = 'ctl00$ctl00$cphContainer$cpContent$'
    ALL_GAMES = '0'
    GAME_PATTERN = re.compile(r'6\s*/\s*(\d{2})')

    def __init__(self, url: str = None, max_retries: int = None, timeout: int = None,
                 session: requests.Session = None):
        super().__init__()
        self.url = url or AppConfig.PCSO_RESULTS_URL
        self.max_retries = max_retries or AppConfig.SCRAPER_RETRIES
        self.timeout = timeout or AppConfig.SCRAPER_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update(AppConfig.HTTP_HEADERS)

    def fetch(self, game_name: str, start_date: date, end_date: date) -> FetchResult:
        self.logger.info(f"Scraping {game_name} results from {start_date} to {end_date}")
        try:
            landing_html = self.fetch_html_with_retry(self.url)
            form = self.build_search_form(landing_html, start_date, end_date)
            results_html = self.fetch_html_with_retry(self.url, data=form)
            candidates = self.parse_results_table(results_html, game_name, start_date, end_date)
        except DataSourceError as e:
            return self._failure(str(e))

        data, errors = self._validate_and_clean(candidates)
        self.logger.info(f"Found {len(data)} valid {game_name} draws ({len(errors)} rejected)")
        return FetchResult(success=True, data=data, errors=errors, source=self.source_name,
                           fetched_at=datetime.now())

    def fetch_html_with_retry(self, url: str, data: Optional[Dict[str, str]] = None) -> str:
        """GET (or POST when data is given) with up to max_retries attempts"""
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                if data is None:
                    response = self.session.get(url, timeout=self.timeout)
                else:
                    response = self.session.post(url, data=data, timeout=self.timeout)
                response.raise_for_status()
                return response.text
            except requests.RequestException as e:
                last_error = e
                self.logger.warning(f"Attempt {attempt}/{self.max_retries} failed for {url}: {e}")
        raise DataSourceError(f"Failed to fetch {url} after {self.max_retries} attempts: {last_error}")

    def build_search_form(self, html: str, start_date: date, end_date: date) -> Dict[str, str]:
        """Hidden ASP.NET state fields plus the search criteria"""
        soup = BeautifulSoup(html, 'lxml')
        form = {
            field['name']: field.get('value', '')
            for field in soup.find_all('input', attrs={'type': 'hidden'})
            if field.get('name')
        }
        if '__VIEWSTATE' not in form:
            raise DataSourceError('Search page did not contain the expected form state')

        form.update({
            self.FORM_PREFIX + 'ddlStartMonth': start_date.strftime('%B'),
            self.FORM_PREFIX + 'ddlStartDate': str(start_date.day),
            self.FORM_PREFIX + 'ddlStartYear': str(start_date.year),
            self.FORM_PREFIX + 'ddlEndMonth': end_date.strftime('%B'),
            self.FORM_PREFIX + 'ddlEndDay': str(end_date.day),
            self.FORM_PREFIX + 'ddlEndYear': str(end_date.year),
            self.FORM_PREFIX + 'ddlSelectGame': self.ALL_GAMES,
            self.FORM_PREFIX + 'btnSearch': 'Search Lotto',
        })
        return form

    def _find_results_table(self, soup: BeautifulSoup):
        table = soup.find('table', id=self.RESULTS_TABLE_ID)
        if table is not None:
            return table
        for candidate in soup.find_all('table'):
            if 'COMBINATION' in candidate.get_text(' ').upper():
                return candidate
        return None

    def parse_results_table(self, html: str, game_name: str,
                            start_date: date, end_date: date) -> List[DrawRecord]:
        """Extract the requested game's draws within the range from the results grid"""
        soup = BeautifulSoup(html, 'lxml')
        table = self._find_results_table(soup)
        if table is None:
            raise DataSourceError('Results table not found on page')

        rows = table.find_all('tr')
        headers = [cell.get_text(strip=True).upper() for cell in rows[0].find_all(['th', 'td'])] if rows else []
        columns = {}
        for key, label in (('game', 'GAME'), ('numbers', 'COMBINATION'), ('date', 'DATE'), ('jackpot', 'JACKPOT')):
            for index, header in enumerate(headers):
                if label in header:
                    columns[key] = index
                    break
        missing = {'game', 'numbers', 'date'} - set(columns)
        if missing:
            raise DataSourceError(f"Results table is missing columns: {', '.join(sorted(missing))}")

        draws = []
        for row in rows[1:]:
            cells = [cell.get_text(strip=True) for cell in row.find_all('td')]
            if len(cells) < len(headers):
                continue

            match = self.GAME_PATTERN.search(cells[columns['game']])
            if not match or f"6/{match.group(1)}" != game_name:
                continue

            raw_date = cells[columns['date']]
            draw_date = DataValidator.parse_draw_date(raw_date)
            if draw_date is not None and not (start_date <= draw_date <= end_date):
                continue

            jackpot = None
            if 'jackpot' in columns:
                amount = re.sub(r'[^\d.]', '', cells[columns['jackpot']])
                try:
                    jackpot = float(amount) if amount else None
                except ValueError:
                    self.logger.debug(f"Unreadable jackpot '{cells[columns['jackpot']]}' on {raw_date}")

            draws.append(DrawRecord(
                game_name=game_name,
                draw_date=draw_date if draw_date is not None else raw_date,
                numbers=[int(n) for n in re.findall(r'\d+', cells[columns['numbers']])],
                jackpot=jackpot
            ))
        return draws
