from puppet_launcher.cli import main

if __name__ == "__main__":
    main()
