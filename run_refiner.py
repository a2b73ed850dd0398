from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from creature_refiner.main import main


if __name__ == "__main__":
    main()
